"""csp_scout.crawler: загрузка sitemap и страниц."""
