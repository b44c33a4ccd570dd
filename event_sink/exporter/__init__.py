from .batch_exporter import export_batch, publish_all

__all__ = ["export_batch", "publish_all"]
