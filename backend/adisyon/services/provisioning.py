class ProvisioningError(ValueError):
    pass


def ensure(session, model, identity, defaults=None):
    """Return ``(row, created)`` for the ``model`` row matching ``identity``.

    A missing row is built from ``identity`` plus ``defaults`` and flushed so
    dependent rows can reference its primary key. An existing row is returned
    as-is: ``defaults`` are only used at creation time.
    """
    if not identity:
        raise ProvisioningError(f"{model.__name__}: identity is required")
    missing = [key for key, value in identity.items() if value is None]
    if missing:
        raise ProvisioningError(f"{model.__name__}: unresolved identity fields {', '.join(missing)}")

    row = session.query(model).filter_by(**identity).first()
    if row:
        return row, False

    fields = dict(defaults or {})
    fields.update(identity)
    row = model(**fields)
    session.add(row)
    session.flush()
    return row, True
