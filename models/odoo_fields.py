# The sales backend (Odoo) returns False instead of null for empty char/many2one
# fields. DTOs run incoming values through these helpers before validation.


def false_to_none(value):
    if value is False:
        return None
    return value


def many2one_id(value):
    """
    Reduce an Odoo many2one value to its id.

    Odoo serializes many2one fields as [id, display_name] or False.
    """
    value = false_to_none(value)
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value
