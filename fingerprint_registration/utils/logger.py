"""
Logging utilities for fingerprint registration.

Provides structured logging for registration runs: per-pair metric
tracking, failure bookkeeping and result persistence. Library modules
log through ``logging.getLogger(__name__)``; attaching a
``RegistrationLogger`` to the package name routes those records to the
console and a log file.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json


PACKAGE_LOGGER_NAME = "fingerprint_registration"


class RegistrationLogger:
    """
    Logger for tracking registration runs and results.

    Combines standard Python logging with per-pair metric tracking and
    result persistence.

    Attributes:
        name: Logger name (the package name routes all module logs here)
        log_dir: Directory for log files
        logger: Python logger instance
        metrics: Dictionary storing run metrics
        failures: Pairs that did not register, with the error message
    """

    def __init__(
        self,
        name: str = PACKAGE_LOGGER_NAME,
        log_dir: Union[str, Path] = "logs",
        level: str = "INFO",
        console_output: bool = True,
        file_output: bool = True
    ):
        """
        Initialize the registration logger.

        Args:
            name: Name of the logger
            log_dir: Directory for log files
            level: Logging level (DEBUG, INFO, WARNING, ERROR)
            console_output: Whether to output to console
            file_output: Whether to output to file
        """
        self.name = name
        self.log_dir = Path(log_dir)
        if file_output:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self.metrics: Dict[str, Any] = {}
        self.failures: List[Dict[str, str]] = []
        self.start_time = datetime.now()

        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers = []  # Clear existing handlers

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        if console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if file_output:
            timestamp = self.start_time.strftime('%Y%m%d_%H%M%S')
            log_file = self.log_dir / f"{name}_{timestamp}.log"
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str) -> None:
        """Log debug message."""
        self.logger.debug(message)

    def info(self, message: str) -> None:
        """Log info message."""
        self.logger.info(message)

    def log_metric(self, name: str, value: float, pair_id: Optional[str] = None) -> None:
        """
        Log a metric value.

        Args:
            name: Metric name, e.g. ``angle_diff_degrees``
            value: Metric value
            pair_id: Optional identifier of the image pair
        """
        if name not in self.metrics:
            self.metrics[name] = []

        entry = {'value': value, 'timestamp': datetime.now().isoformat()}
        if pair_id is not None:
            entry['pair'] = pair_id

        self.metrics[name].append(entry)
        self.info(f"Metric {name}: {value:.6f}" + (f" ({pair_id})" if pair_id else ""))

    def log_params(self, params: Dict[str, Any]) -> None:
        """
        Log run parameters.

        Args:
            params: Dictionary of parameter names and values
        """
        self.metrics['params'] = params
        self.info(f"Parameters: {json.dumps(params, indent=2, default=str)}")

    def log_failure(self, pair_id: str, error: Exception) -> None:
        """
        Record a pair that failed to register.

        Args:
            pair_id: Identifier of the image pair
            error: The raised exception
        """
        self.failures.append({
            'pair': pair_id,
            'error': type(error).__name__,
            'message': str(error),
        })
        self.logger.error(f"Registration failed for {pair_id}: {type(error).__name__}: {error}")

    def log_results(self, results: Dict[str, Any]) -> None:
        """
        Log final run results.

        Args:
            results: Dictionary of result names and values
        """
        self.metrics['results'] = results
        self.info("Final Results:")
        for key, value in results.items():
            if isinstance(value, float):
                self.info(f"  {key}: {value:.6f}")
            else:
                self.info(f"  {key}: {value}")

    def save_metrics(self, filename: Optional[str] = None) -> Path:
        """
        Save all logged metrics and failures to a JSON file.

        Args:
            filename: Optional custom filename

        Returns:
            Path to the saved metrics file
        """
        if filename is None:
            timestamp = self.start_time.strftime('%Y%m%d_%H%M%S')
            filename = f"{self.name}_{timestamp}_metrics.json"

        self.log_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.log_dir / filename

        output = {
            'run_name': self.name,
            'start_time': self.start_time.isoformat(),
            'end_time': datetime.now().isoformat(),
            'metrics': self.metrics,
            'failures': self.failures,
        }

        with open(filepath, 'w') as f:
            json.dump(output, f, indent=2, default=str)

        self.info(f"Metrics saved to {filepath}")
        return filepath


def get_logger(
    name: str = PACKAGE_LOGGER_NAME,
    log_dir: str = "logs",
    level: str = "INFO",
    file_output: bool = True
) -> RegistrationLogger:
    """
    Get or create a registration logger.

    Args:
        name: Logger name
        log_dir: Directory for log files
        level: Logging level
        file_output: Whether to also write a log file

    Returns:
        RegistrationLogger instance
    """
    return RegistrationLogger(name, log_dir, level, file_output=file_output)


class ProgressTracker:
    """
    Track progress over a batch of image pairs.

    Provides timing estimates and progress reporting.
    """

    def __init__(self, total: int, logger: Optional[RegistrationLogger] = None):
        """
        Initialize progress tracker.

        Args:
            total: Number of pairs to register
            logger: Optional logger for output
        """
        self.total = total
        self.current = 0
        self.start_time = datetime.now()
        self.logger = logger

    def update(self, n: int = 1) -> None:
        """
        Update progress by n pairs.

        Args:
            n: Number of pairs completed
        """
        self.current += n

        if self.logger and self.current % max(1, self.total // 20) == 0:
            elapsed = (datetime.now() - self.start_time).total_seconds()
            rate = self.current / elapsed if elapsed > 0 else 0
            eta = (self.total - self.current) / rate if rate > 0 else 0

            self.logger.info(
                f"Progress: {self.current}/{self.total} "
                f"({100*self.current/self.total:.1f}%) "
                f"ETA: {eta:.1f}s"
            )

    def finish(self) -> float:
        """
        Mark the batch as complete.

        Returns:
            Total elapsed time in seconds
        """
        elapsed = (datetime.now() - self.start_time).total_seconds()
        if self.logger:
            self.logger.info(f"Registered {self.total} pairs in {elapsed:.2f}s")
        return elapsed
