"""Integration adapters for the platform API (metadata, approvals, data values).

Keep these modules small and testable:
- No engine / lifecycle decisions
- Pure IO + payload mapping
"""
