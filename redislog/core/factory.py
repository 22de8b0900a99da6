"""Build a pipeline from Settings."""

from redislog.config import Settings, get_settings
from redislog.core.filtering.engine import FilterEngine
from redislog.core.logging import get_logger, setup_logging
from redislog.core.pipeline import LogPipeline, PolicyLoader
from redislog.core.sinks.base import BaseSink
from redislog.core.sinks.bounded_list import BoundedListSink
from redislog.core.sinks.channel import ChannelSink
from redislog.core.sinks.naming import tenant_name

logger = get_logger(__name__)


def create_pipeline(settings: Settings | None = None) -> LogPipeline:
    """Configure logging, then create the bounded list sink, the channel sink
    (if configured) and the pipeline.
    """
    settings = settings or get_settings()

    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        is_development=settings.is_development,
    )

    if settings.log_list_partition_by_tenant:
        redis_key = tenant_name(settings.log_list_name, settings.log_list_default_tenant)
    else:
        redis_key = None

    sinks: list[BaseSink] = [
        BoundedListSink(
            settings.redis_url,
            name=settings.log_list_name,
            redis_key=redis_key,
            max_size=settings.log_list_max_size,
        )
    ]
    if settings.log_channel:
        sinks.append(ChannelSink(settings.redis_url, channel=settings.log_channel))

    pipeline = LogPipeline(
        sinks,
        engine=FilterEngine(response_only=settings.filter_response_only),
        policy_loader=PolicyLoader(
            settings_path=settings.filter_settings_path,
            log_settings_path=settings.filter_log_settings_path,
        ),
        queue_size=settings.pipeline_queue_size,
    )

    logger.info(
        "pipeline_created",
        list_name=settings.log_list_name,
        partition_by_tenant=settings.log_list_partition_by_tenant,
        max_size=settings.log_list_max_size,
        channel=settings.log_channel,
    )
    return pipeline
