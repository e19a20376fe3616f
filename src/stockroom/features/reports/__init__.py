"""Reporting for stockroom.

Four report kinds are computed on demand from point-in-time repository reads:
inventory status, consumption trends, expiry and location utilization. Each
report is a plain pydantic object that can be returned as JSON or flattened
to CSV."""
