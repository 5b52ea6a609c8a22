# File: src/parkledger/presentation/cli.py
"""
Parking Ledger Command Shell

Line-oriented front end of the ledger:
1. Reads one command per line from an input stream
2. Hands each line to the CommandProcessor
3. Writes result lines (or the single error line) to the output stream

The session ends on the quit command or at end of input. Logs never go to
the output stream.
"""

from typing import Iterable, TextIO
import logging

from ..application.commands import CommandProcessor


class CommandShell:
    """Presenter between a text stream and the command processor"""

    def __init__(self, processor: CommandProcessor, input_stream: TextIO, output_stream: TextIO):
        self.processor = processor
        self.input_stream = input_stream
        self.output_stream = output_stream
        self.logger = logging.getLogger(self.__class__.__name__)

    def run(self) -> int:
        """
        Run until quit or end of input

        Returns: number of commands processed
        """
        self.logger.info("Command shell started")
        processed = 0

        for line in self.input_stream:
            result = self.processor.process_line(line)
            if result is None:
                continue

            processed += 1
            self._write(result.output())
            if result.ends_session:
                self.logger.info("Quit command received")
                break

        self.logger.info(f"Command shell stopped after {processed} command(s)")
        return processed

    def _write(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.output_stream.write(f"{line}\n")
        self.output_stream.flush()
