"""csp_scout.parser: разбор sitemap XML и HTML-разметки."""
