import sys
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent.parent.parent / "src"))

from subsim.utils.logging_config import SimulationLogger, setup_logging, get_logger


def test_console_only_logger_writes_no_file(tmp_path):
    logger = SimulationLogger("SUB_SIM_TEST", log_dir=None, console_output=False)
    assert logger.log_file is None
    assert logger.logger.handlers == []


def test_run_log_file_created(tmp_path):
    logger = SimulationLogger("SUB_SIM_TEST", log_dir=tmp_path / "logs", console_output=False)
    logger.info("hello")
    for handler in logger.logger.handlers:
        handler.flush()

    assert logger.log_file.parent == tmp_path / "logs"
    assert "hello" in logger.log_file.read_text()


def test_timers_and_counters():
    logger = SimulationLogger("SUB_SIM_TEST", console_output=False)

    assert logger.end_timer("never_started") == 0.0

    for _ in range(3):
        logger.start_timer("frame")
        assert logger.end_timer("frame") >= 0.0
        logger.increment_counter("running_ticks")

    assert logger.get_counter("running_ticks") == 3
    assert logger.get_counter("paused_frames") == 0
    assert logger._timings["frame"][0] == 3

    # Summary must not raise with or without a timestep
    logger.log_performance_summary()
    logger.log_performance_summary(0.01)


def test_setup_logging_replaces_global():
    before = get_logger()
    after = setup_logging(log_level="DEBUG", console_output=False)

    assert get_logger() is after
    assert after is not before
    # Same underlying named logger, so earlier module-level wrappers see the change
    assert before.logger is after.logger
