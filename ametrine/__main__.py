import asyncio
import logging
import sys
from dataclasses import replace

from .config import load_config
from .errors import ConfigError, LauncherError
from .launcher import prepare_launch
from .process import launch
from .system import detect_platform

log = logging.getLogger('ametrine')


async def main(argv) -> int:
    try:
        config = load_config()
    except ConfigError as e:
        logging.basicConfig(format='%(asctime)s - %(levelname)s - %(message)s')
        log.error(str(e))
        return 1
    if argv:
        config = replace(config, version=argv[0])
    logging.basicConfig(level=config.log_level.upper(), format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        platform = detect_platform()
        log.info(f"Detected OS: {platform.name}, Arch: {platform.architecture}")
        prepared = await prepare_launch(config, platform)
    except (LauncherError, OSError):
        log.exception("--- An error occurred during setup ---")
        return 1

    report = prepared.report
    log.info(f"Downloads: {report.scheduled} scheduled, {len(report.skipped)} skipped, "
             f"{len(report.succeeded)} succeeded, {len(report.failed)} failed")

    try:
        game = await launch(prepared.java, prepared.command.arguments, cwd=prepared.layout.instance_dir)
    except OSError:
        log.exception(f"Could not start {prepared.java}")
        return 1

    # The child belongs to this event loop; keep the loop alive until it exits.
    return_code = await game.wait()
    log.info(f"Minecraft process exited with code {return_code}.")
    return 0


def run():
    try:
        sys.exit(asyncio.run(main(sys.argv[1:])))
    except KeyboardInterrupt:
        log.info("Launch cancelled by user.")


if __name__ == "__main__":
    run()
