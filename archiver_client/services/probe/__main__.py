"""Module entrypoint for probing the configured archiver."""

from archiver_client.services.probe.main import main

if __name__ == "__main__":
    raise SystemExit(main())
