from loguru import logger

from alexa_prune.logging_setup import configure_logging


def test_configure_logging_writes_debug_to_file(tmp_path):
    configure_logging(debug=True, log_dir=tmp_path)
    try:
        logger.debug("Response Status Code: {}", 404)
        logger.info("visible at info")
    finally:
        configure_logging()

    text = (tmp_path / "alexa_prune.log").read_text(encoding="utf-8")
    assert "Response Status Code: 404" in text
    assert "visible at info" in text


def test_configure_logging_info_hides_debug(tmp_path):
    configure_logging(debug=False, log_dir=tmp_path)
    try:
        logger.debug("raw body")
        logger.info("progress")
    finally:
        configure_logging()

    text = (tmp_path / "alexa_prune.log").read_text(encoding="utf-8")
    assert "raw body" not in text
    assert "progress" in text
