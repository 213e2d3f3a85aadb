"""
Schema provisioning - startup table creation and demo data.
"""

from workout_tracker.kernel.provisioning.provisioner import (
    PROVISIONING_ORDER,
    ProvisioningReport,
    RelationOutcome,
    SchemaProvisioner,
    provision_schema,
)
from workout_tracker.kernel.provisioning.seed_data import DEMO_CATALOG, build_demo_records

__all__ = [
    "PROVISIONING_ORDER",
    "ProvisioningReport",
    "RelationOutcome",
    "SchemaProvisioner",
    "provision_schema",
    "DEMO_CATALOG",
    "build_demo_records",
]
