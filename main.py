"""Simple entrypoint to replay the evaluation scenarios locally."""

from dti_app.logging_config import configure_logging
from evaluation.harness import run_smoke_checks


def main() -> None:
    configure_logging("WARNING")
    for line in run_smoke_checks():
        print(line)


if __name__ == "__main__":
    main()
