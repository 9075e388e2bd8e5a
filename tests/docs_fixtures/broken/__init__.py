import routedoc_missing_dependency  # noqa: F401
