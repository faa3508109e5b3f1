class InvariantViolation(Exception):
    """An operation would break a rule the data model guarantees,
    e.g. pricing a plan that has no entry in the price table."""
