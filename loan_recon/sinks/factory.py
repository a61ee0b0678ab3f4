"""Build the persistence collaborator selected in configuration."""

import logging

from loan_recon.collaborators import PersistenceCollaborator
from loan_recon.config import LoanReconConfig

logger = logging.getLogger(__name__)


def create_persistence(config: LoanReconConfig) -> PersistenceCollaborator | None:
    """Return the configured snapshot sink, or None for local-only sessions."""
    backend = config.persistence.backend
    logger.info("Snapshot persistence backend: %s", backend)

    if backend == "json":
        from loan_recon.sinks.json_file import JsonFileSink

        return JsonFileSink(config.output.json_output_dir, pretty=config.output.pretty_json)
    if backend == "kafka":
        from loan_recon.sinks.kafka import KafkaSnapshotSink

        return KafkaSnapshotSink(config.kafka)
    if backend == "postgres":
        from loan_recon.sinks.postgres import PostgresSnapshotSink

        return PostgresSnapshotSink(config.postgres)
    return None
