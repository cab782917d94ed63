"""Browser automation modules (Playwright, async API).

``session`` owns the browser/context lifecycle, ``stealth`` and
``fingerprint`` make the context look like the host machine, and
``navigation``/``challenge`` drive to the result page and recognise
bot-detection interstitials. ``actions`` handles the search box,
``extraction`` reads results, and ``diagnostics`` captures post-mortem
artifacts.
"""
