"""EVM execution: gas, approvals, submission and offline serialization."""
