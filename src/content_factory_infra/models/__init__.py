# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Content Factory Infrastructure Models.

Immutable pydantic models for everything that crosses a component boundary
(alerts, error records, status reports, health responses) and dataclasses
for the single-owner mutable state of the connection manager.
"""

from content_factory_infra.models.model_alert import ModelAlert
from content_factory_infra.models.model_alert_delivery_result import (
    ModelAlertDeliveryResult,
)
from content_factory_infra.models.model_alert_rule import ModelAlertRule
from content_factory_infra.models.model_circuit_breaker_snapshot import (
    ModelCircuitBreakerSnapshot,
)
from content_factory_infra.models.model_connection_health import (
    ModelConnectionHealth,
)
from content_factory_infra.models.model_connection_metrics import (
    ModelConnectionMetrics,
)
from content_factory_infra.models.model_connection_status import (
    ModelConnectionStatus,
)
from content_factory_infra.models.model_dashboard_data import ModelDashboardData
from content_factory_infra.models.model_domain_breakdown import ModelDomainBreakdown
from content_factory_infra.models.model_domain_overview import ModelDomainOverview
from content_factory_infra.models.model_error_classification import (
    ModelErrorClassification,
)
from content_factory_infra.models.model_health_check_response import (
    ModelHealthCheckResponse,
)
from content_factory_infra.models.model_health_check_summary import (
    ModelHealthCheckSummary,
)
from content_factory_infra.models.model_health_metrics import ModelHealthMetrics
from content_factory_infra.models.model_health_trends import ModelHealthTrends
from content_factory_infra.models.model_metric_point import ModelMetricPoint
from content_factory_infra.models.model_metric_summary import ModelMetricSummary
from content_factory_infra.models.model_metrics_summary_report import (
    ModelMetricsSummaryReport,
)
from content_factory_infra.models.model_monitoring_stats import ModelMonitoringStats
from content_factory_infra.models.model_query_record import ModelQueryRecord
from content_factory_infra.models.model_service_check import ModelServiceCheck
from content_factory_infra.models.model_system_error import ModelSystemError
from content_factory_infra.models.model_transaction_context import (
    ModelTransactionContext,
    generate_transaction_id,
)
from content_factory_infra.models.model_transaction_operation import (
    ModelTransactionOperation,
    RollbackHandler,
    TransactionApply,
)

__all__: list[str] = [
    "ModelAlert",
    "ModelAlertDeliveryResult",
    "ModelAlertRule",
    "ModelCircuitBreakerSnapshot",
    "ModelConnectionHealth",
    "ModelConnectionMetrics",
    "ModelConnectionStatus",
    "ModelDashboardData",
    "ModelDomainBreakdown",
    "ModelDomainOverview",
    "ModelErrorClassification",
    "ModelHealthCheckResponse",
    "ModelHealthCheckSummary",
    "ModelHealthMetrics",
    "ModelHealthTrends",
    "ModelMetricPoint",
    "ModelMetricSummary",
    "ModelMetricsSummaryReport",
    "ModelMonitoringStats",
    "ModelQueryRecord",
    "ModelServiceCheck",
    "ModelSystemError",
    "ModelTransactionContext",
    "ModelTransactionOperation",
    "RollbackHandler",
    "TransactionApply",
    "generate_transaction_id",
]
