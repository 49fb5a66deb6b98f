def test_import_core_modules() -> None:
    import py_ledgersync  # noqa: F401
    from py_ledgersync import application, domain, infrastructure  # noqa: F401
    from py_ledgersync.application import ports
    from py_ledgersync.application.use_cases_async import inventory_sync
    from py_ledgersync.presentation.cli.main import app

    assert py_ledgersync.__version__
    assert hasattr(ports, "AsyncUnitOfWork")
    assert hasattr(inventory_sync, "AsyncInventorySync")
    assert app is not None
