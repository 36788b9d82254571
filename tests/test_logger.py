import logging

from offseason.logger import setup_logger


class TestSetupLogger:
    def test_file_keeps_debug_while_console_is_quiet(self, tmp_path, capsys):
        log_file = tmp_path / "logs" / "run.log"
        logger = setup_logger("offseason.tests.quiet", "WARNING", log_file)
        try:
            logger.debug("dropped 2 short rows")
            logger.warning("skipping row 3")
            for handler in logger.handlers:
                handler.flush()

            console = capsys.readouterr().out
            assert "skipping row 3" in console
            assert "dropped 2 short rows" not in console

            contents = log_file.read_text(encoding="utf-8")
            assert "DEBUG - dropped 2 short rows" in contents
            assert "WARNING - skipping row 3" in contents
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    def test_handlers_added_once(self, tmp_path):
        name = "offseason.tests.once"
        logger = setup_logger(name, logging.INFO, tmp_path / "a.log")
        try:
            again = setup_logger(name, logging.INFO, tmp_path / "a.log")
            assert again is logger
            assert len(logger.handlers) == 2
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    def test_lowercase_level_name(self, tmp_path):
        logger = setup_logger("offseason.tests.lower", "info", tmp_path / "a.log")
        try:
            console = logger.handlers[0]
            assert console.level == logging.INFO
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    def test_root_logger_left_alone(self, tmp_path):
        root_level = logging.getLogger().level
        root_handlers = list(logging.getLogger().handlers)

        logger = setup_logger("offseason.tests.scoped", logging.INFO, tmp_path / "a.log")
        try:
            assert logger.level == logging.DEBUG
            assert logging.getLogger().level == root_level
            assert logging.getLogger().handlers == root_handlers
            # Third-party loggers propagate to root, which never gets the package handlers.
            assert not set(logger.handlers) & set(logging.getLogger().handlers)
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
