"""Output sinks for snapshots and exports."""

from loan_recon.sinks.console import ConsoleSink
from loan_recon.sinks.json_file import JsonFileSink
from loan_recon.sinks.kafka import KafkaSnapshotSink
from loan_recon.sinks.postgres import PostgresSnapshotSink

__all__ = ["ConsoleSink", "JsonFileSink", "KafkaSnapshotSink", "PostgresSnapshotSink"]
