"""Presentation layer: the command shell"""
