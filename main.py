import logging

from aiohttp import web
from pydantic_settings import BaseSettings, SettingsConfigDict

from trending.proxy import create_app


class ProxyConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="PROXY_", extra="ignore"
    )

    host: str = "localhost"
    port: int = 8080


def main():
    logging.basicConfig(level=logging.INFO)
    config = ProxyConfig()
    logging.info(f"Starting proxy on {config.host}:{config.port}...")
    web.run_app(create_app(), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
