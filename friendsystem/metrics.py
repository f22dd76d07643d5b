from prometheus_client import Counter, start_http_server
import logging

logger = logging.getLogger(__name__)

OPERATIONS = Counter(
    'friendsystem_operations_total',
    'Friend system operations by outcome',
    ['operation', 'result'],
)
CONFLICT_RETRIES = Counter(
    'friendsystem_conflict_retries_total',
    'Transactions re-run after a serialization conflict or key collision',
    ['operation'],
)


def record_outcome(operation: str, result: str) -> None:
    OPERATIONS.labels(operation=operation, result=result).inc()


def record_retry(operation: str) -> None:
    CONFLICT_RETRIES.labels(operation=operation).inc()


def init_metrics(port: int = 8001):
    """Initialize Prometheus metrics server"""
    try:
        start_http_server(port)
        logger.info(f"Prometheus metrics server started on port {port}")
    except OSError as e:
        logger.warning(f'Prometheus start failed: {e}')
