"""
Submarine Simulation Logging Configuration
==========================================

This module provides logging setup for the submarine simulation, including
console output, optional file logging, frame timing and the telemetry stream
written for every running tick.

Features:
- Leveled logging through one named logger shared by every module
- Optional per-run log file next to the telemetry
- Color-coded console output
- Frame counters and wall-clock timing checked against the fixed timestep
- Telemetry CSV (Time,X,Y,Angle) plus JSON run metadata
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any, Tuple
import time
import json


class ColoredFormatter(logging.Formatter):
    """Custom formatter that adds color codes to console output."""

    # Color codes for different log levels
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m'   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        # Color a copy so file handlers keep the plain level name
        record = logging.makeLogRecord(record.__dict__)
        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.RESET}"
        return super().format(record)


FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(module)s:%(lineno)d | %(message)s'
CONSOLE_FORMAT = '%(asctime)s | %(levelname)-8s | %(message)s'


class SimulationLogger:
    """
    Logger for one simulation process.

    Wraps the named ``logging.Logger`` used by every module and adds the
    bookkeeping of the fixed-step loop: frame counters and the wall-clock
    cost of each frame, compared with the simulated timestep when the run
    is summarized.
    """

    def __init__(self,
                 name: str = "SUB_SIM",
                 log_dir: Optional[Path] = None,
                 log_level: str = "INFO",
                 console_output: bool = True):
        """
        Initialize simulation logger.

        Args:
            name: Logger name identifier
            log_dir: Directory for the run's log file (console only if None)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            console_output: Enable console output
        """
        self.name = name
        self.log_dir = Path(log_dir) if log_dir is not None else None
        self.log_file = None

        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, log_level.upper()))
        self.logger.propagate = False
        self._reset_handlers()

        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.log_file = self.log_dir / f"{name.lower()}_{timestamp}.log"
            self._add_handler(logging.FileHandler(self.log_file), logging.Formatter(FILE_FORMAT))

        if console_output:
            self._add_handler(logging.StreamHandler(sys.stdout),
                              ColoredFormatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))

        self._started: Dict[str, float] = {}
        # name -> (calls, total seconds, worst seconds)
        self._timings: Dict[str, Tuple[int, float, float]] = {}
        self._counters: Dict[str, int] = {}

        if self.log_file is not None:
            self.logger.info(f"Run log: {self.log_file}")

    def _reset_handlers(self) -> None:
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

    def _add_handler(self, handler: logging.Handler, formatter: logging.Formatter) -> None:
        handler.setFormatter(formatter)
        self.logger.addHandler(handler)

    # === FRAME BOOKKEEPING ===

    def start_timer(self, name: str) -> None:
        self._started[name] = time.perf_counter()

    def end_timer(self, name: str) -> float:
        """
        Stop a timer and fold the elapsed time into its statistics.

        Returns:
            Elapsed wall-clock time [s] (0 if the timer was never started)
        """
        started = self._started.pop(name, None)
        if started is None:
            self.logger.warning(f"Timer '{name}' was not started")
            return 0.0

        elapsed = time.perf_counter() - started
        calls, total, worst = self._timings.get(name, (0, 0.0, 0.0))
        self._timings[name] = (calls + 1, total + elapsed, max(worst, elapsed))
        return elapsed

    def increment_counter(self, name: str, value: int = 1) -> None:
        self._counters[name] = self._counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def log_progress(self, tick: int, sim_time: float, state_summary: str) -> None:
        """One progress line for the running simulation."""
        self.logger.info(f"Tick {tick:6d} | t={sim_time:8.3f}s | {state_summary}")

    def log_performance_summary(self, fixed_timestep: Optional[float] = None) -> None:
        """
        Log counters and frame timing.

        Args:
            fixed_timestep: Simulated time per frame [s]; when given, each
                timer is also reported as a multiple of real time
        """
        self.logger.info("=== Performance Summary ===")
        for name, count in sorted(self._counters.items()):
            self.logger.info(f"{name}: {count}")

        for name, (calls, total, worst) in self._timings.items():
            mean = total / calls
            line = f"{name}: {calls} calls, mean {mean * 1e3:.3f}ms, worst {worst * 1e3:.3f}ms"
            if fixed_timestep and mean > 0:
                line += f" ({fixed_timestep / mean:.1f}x real time)"
            self.logger.info(line)
            if fixed_timestep and worst > fixed_timestep:
                self.logger.warning(f"{name}: slowest frame exceeded dt={fixed_timestep}s")

        if self._started:
            self.logger.warning(f"Unclosed timers: {sorted(self._started)}")

    # Standard logging interface methods
    def debug(self, message: str) -> None:
        self.logger.debug(message)

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)


class TelemetryLogger:
    """
    Telemetry stream writer.

    Writes one CSV row (Time,X,Y,Angle) per running simulation tick. The
    header is written once when the file is opened and every row is flushed
    immediately, so a run that is interrupted still leaves a usable file.
    """

    HEADER = ("Time", "X", "Y", "Angle")

    def __init__(self, log_dir: Optional[Path] = None, filename: Optional[str] = None):
        """
        Initialize telemetry logger.

        Args:
            log_dir: Directory for data files
            filename: CSV file name (sub_<timestamp>.csv if None)
        """
        if log_dir is None:
            log_dir = Path("temp_logs")
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.csv_file = self.log_dir / (filename or f"sub_{timestamp}.csv")
        self.json_metadata = self.log_dir / f"{self.csv_file.stem}_metadata.json"
        self.rows_written = 0

        self._file = open(self.csv_file, 'w')
        self._write_csv_header()

        get_logger().info(f"Writing CSV file to: {self.csv_file}")

    def _write_csv_header(self):
        """Write CSV header."""
        self._file.write(",".join(self.HEADER) + "\n")
        self._file.flush()

    def log(self, record) -> None:
        """
        Append one telemetry record.

        Args:
            record: TelemetryRecord (time [s], x [m], y [m], angle [deg])
        """
        if self._file is None:
            raise ValueError(f"Telemetry file already closed: {self.csv_file}")

        data_row = [
            f"{record.time:.6f}",
            f"{record.x:.6f}",
            f"{record.y:.6f}",
            f"{record.angle:.6f}"
        ]
        self._file.write(",".join(data_row) + "\n")
        self._file.flush()
        self.rows_written += 1

    def save_metadata(self, config: Dict[str, Any], scenario_info: Dict[str, Any]):
        """Save simulation metadata to JSON file."""
        metadata = {
            "timestamp": datetime.now().isoformat(),
            "rows": self.rows_written,
            "config": config,
            "scenario": scenario_info,
            "data_file": str(self.csv_file.name)
        }

        with open(self.json_metadata, 'w') as f:
            json.dump(metadata, f, indent=2)

    def close(self):
        """Close the CSV file."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


# Global logger instance
_global_logger: Optional[SimulationLogger] = None


def get_logger(name: str = "SUB_SIM") -> SimulationLogger:
    """Get the global simulation logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = SimulationLogger(name)
    return _global_logger


def setup_logging(log_level: str = "INFO", console_output: bool = True, log_dir: Optional[Path] = None) -> SimulationLogger:
    """Setup global logging configuration.

    Args:
        log_level: Logging level for the global logger
        console_output: Whether to enable console output
        log_dir: Optional directory to write log files to
    """
    global _global_logger
    # Module-level wrappers created earlier share the same named logging.Logger,
    # so they pick up the new handlers too
    _global_logger = SimulationLogger("SUB_SIM", log_dir=log_dir, log_level=log_level,
                                      console_output=console_output)
    return _global_logger
