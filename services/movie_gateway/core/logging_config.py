from services.common.core.logging_config import configure_queue_logging
from services.common.core.logging_config import setup_logging as common_setup_logging

from ..config import GatewayConfig


def setup_logging(gateway_config: GatewayConfig) -> None:
    """
    Load the YAML config and initialize logging.
    Also configure async log delivery when a sink URL is set.
    """
    common_setup_logging(gateway_config.LOG_CONFIG_PATH)
    configure_queue_logging(service_name="movie-gateway", sink_url=gateway_config.LOG_SINK_URL)
