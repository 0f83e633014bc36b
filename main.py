#!/usr/bin/env python3
import asyncio, sys
from config.logging_config import configure
from config.app_config import get_settings
from mqtt_sensors.core.exceptions import ConfigurationError
from mqtt_sensors.services.bridge_service import SensorBridgeService

async def async_main():
    configure()
    bridge = SensorBridgeService.from_settings(get_settings())
    await bridge.startup()
    try:
        await bridge.run()
    finally:
        await bridge.shutdown()

def run():
    try:
        asyncio.run(async_main())
    except ConfigurationError as e:
        sys.exit(f"configuration error: {e}")
    except KeyboardInterrupt:
        sys.exit("🌙  graceful shutdown")

if __name__ == "__main__":
    run()
