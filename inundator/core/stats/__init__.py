from .run_stats import RunStats as RunStats
from .statistics_aggregator import (
    StatisticsAggregator as StatisticsAggregator,
    http_statistics as http_statistics,
    tls_statistics as tls_statistics,
)
