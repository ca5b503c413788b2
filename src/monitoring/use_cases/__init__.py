"""Use-case level logic.

These modules implement the reporting-period lifecycle (openness, reopen,
reset) and data value validation on top of the integrations.

They should be:
- deterministic given an explicit `now`
- unit-testable with stub collaborators
- free of web/framework code
"""
