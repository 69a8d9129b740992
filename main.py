from uprp.scraper.cli import main

if __name__ == "__main__":
    # Equivalent to the ``uprp-crawl`` console script installed by pyproject.toml.
    raise SystemExit(main())
