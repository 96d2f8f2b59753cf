"""
Environment and File Configuration

Loads client options from KONTENT_* variables and from a YAML file that
is watched for changes (API key rotation without restart).
"""

import asyncio
import os
import tempfile
from pathlib import Path

from kontent_ai_core import (
    ActionInvoker,
    ClientFactoryBuilder,
    ConfigurationError,
    OptionsFileWatcher,
    load_options_from_env,
)

CONFIG = """
clients:
  management:
    environment_id: 975bf280-fd91-488c-994c-2f04416e5ee3
    base_url: https://manage.kontent.ai/v2
    api_key: first-key
    retry:
      max_retry_attempts: 5
      base_delay: 0.5
"""


class ManagementClient:

    def __init__(self, options, invoker: ActionInvoker):
        self.options = options
        self.invoker = invoker


def from_environment():
    print("\n=== From environment ===")
    os.environ.setdefault("KONTENT_ENVIRONMENT_ID", "975bf280-fd91-488c-994c-2f04416e5ee3")
    os.environ.setdefault("KONTENT_BASE_URL", "https://deliver.kontent.ai")
    try:
        options = load_options_from_env()
        print(f"Environment: {options.environment_id}, retries: {options.retry.max_retry_attempts}")
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}")


async def from_file():
    print("\n=== From watched file ===")
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "kontent.yaml"
        path.write_text(CONFIG)

        watcher = OptionsFileWatcher(path, check_interval=1.0)
        builder = ClientFactoryBuilder(ManagementClient)
        for name, options in watcher.current_options.items():
            builder.add_client(name, options)
        factory = builder.build(monitor=watcher.monitor)

        async with factory:
            with watcher:
                print("Key before:", factory.options.get("management").api_key)
                path.write_text(CONFIG.replace("first-key", "rotated-key"))
                watcher.reload_now()
                print("Key after:", factory.options.get("management").api_key)


if __name__ == "__main__":
    from_environment()
    asyncio.run(from_file())
