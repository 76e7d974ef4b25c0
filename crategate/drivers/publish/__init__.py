"""Publish command forwarder."""

from crategate.drivers.publish.publish_forwarder import PublishForwarder, target_registry

__all__ = ["PublishForwarder", "target_registry"]
