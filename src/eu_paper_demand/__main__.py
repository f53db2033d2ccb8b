"""
Run the paper demand cleaning with settings from the environment.
"""

from .config import CleaningConfig
from .processors import PaperDemandPipeline
from .utils.logging import setup_logging


def main() -> None:
    config = CleaningConfig()
    setup_logging(config.logging)

    pipeline = PaperDemandPipeline(config)
    pipeline.run()


if __name__ == "__main__":
    main()
