import sys
from datetime import datetime

from colorama import init as colorama_init, Fore, Style
colorama_init(autoreset=True)


class Log:
    """Leveled, timestamped progress log. Writes to stderr so stdout stays clean."""

    def __init__(self, verbose: int = 1, stream=None):
        self.verbose = verbose
        self.stream = stream or sys.stderr
        self.URL = Fore.MAGENTA

    def _time(self):
        return datetime.now().strftime("[%H:%M:%S]")

    def _fmt(self, level: str, color: str):
        return f"{self._time()} {color}[{level}]{Style.RESET_ALL}"

    def _emit(self, line: str):
        print(line, file=self.stream)

    def info(self, msg: str):
        if self.verbose >= 1:
            self._emit(f"{self._fmt('INFO', Fore.CYAN)} {msg}")

    def warn(self, msg: str):
        if self.verbose >= 0:
            self._emit(f"{self._fmt('WARNING', Fore.YELLOW)} {msg}")

    def ok(self, msg: str):
        self._emit(f"{self._fmt('SUCCESS', Fore.GREEN)} {msg}")

    def fail(self, msg: str):
        self._emit(f"{self._fmt('FAIL', Fore.RED)} {msg}")

    def debug(self, msg: str):
        if self.verbose >= 2:
            self._emit(f"{self._fmt('DEBUG', Fore.MAGENTA)} {msg}")

    def form_finding(self, potential: str, page_url: str, method: str,
                     action_url: str, indicators):
        if self.verbose < 1:
            return
        col = {"high": Fore.RED, "medium": Fore.YELLOW,
               "low": Fore.GREEN}.get(potential, Fore.WHITE)
        tags = ", ".join(indicators) or "no indicators"
        self._emit(f"{self._fmt('FORM', col)} {self.URL}{page_url}{Style.RESET_ALL} "
                   f"{method} → {action_url} "
                   f"{Style.DIM}({tags}){Style.RESET_ALL}")
