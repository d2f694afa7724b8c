"""
Support components for ESB consumers.

Provides a redelivery policy that gives connection failures and other
failures separate retry ceilings, plus the exchange model, configuration,
metrics and identifier helpers it works with.
"""
