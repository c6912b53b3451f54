import logging

from src.tuition_system.tuition_system.common.logging_setup import configure_logging
from src.tuition_system.tuition_system.database import bootstrap

from scripts import init_db


def test_init_db_configures_the_logger_package_modules_write_to(caplog):
    package_logger = configure_logging("INFO", name=init_db.PACKAGE_LOGGER)

    assert bootstrap.logger.name.startswith(init_db.PACKAGE_LOGGER + ".")
    assert init_db.logger.name.startswith(init_db.PACKAGE_LOGGER + ".")
    assert bootstrap.logger.getEffectiveLevel() == logging.INFO
    assert package_logger.handlers

    with caplog.at_level(logging.INFO, logger=init_db.PACKAGE_LOGGER):
        bootstrap.logger.info("Applied schema.sql")
    assert "Applied schema.sql" in caplog.text


def test_configure_logging_adds_one_handler_however_often_called():
    name = "tuition_system_test_logger"
    configure_logging("DEBUG", name=name)
    logger = configure_logging("WARNING", name=name)

    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_unknown_level_name_falls_back_to_info():
    assert configure_logging("LOUD", name="tuition_system_fallback").level == logging.INFO
