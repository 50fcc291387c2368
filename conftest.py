def pytest_addoption(parser):
    parser.addoption(
        "--run-all",
        action="store_true",
        default=False,
        help="Run all tests including the slow end-to-end searches.",
    )


def pytest_configure(config):
    if config.getoption("--run-all"):
        # Drop the 'not slow' filter from the pytest configuration
        config.option.markexpr = ""
