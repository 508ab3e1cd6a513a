# cli.py

"""
Запуск CSP Scout из корня репозитория без установки пакета.

Пример запуска:
    python cli.py scan --sitemap https://example.com/sitemap.xml --out ./out --concurrency 10
"""
from csp_scout.cli import cli


if __name__ == '__main__':
    cli()
