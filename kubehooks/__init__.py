"""Kubernetes authentication, authorization and admission webhooks, with a Foo custom-resource model."""

__version__ = "0.1.0"