"""Infrastructure layer: ConfigMap stores and the cluster handle."""
