import pytest


@pytest.mark.e2e
@pytest.mark.slow
def test_ui_hover_tooltip_and_export_csv(live_server_url):
    pw = pytest.importorskip("playwright.sync_api")
    from playwright.sync_api import sync_playwright

    with sync_playwright() as p:
        browser = p.chromium.launch()
        ctx = browser.new_context(accept_downloads=True)
        page = ctx.new_page()

        page.goto(live_server_url, wait_until="networkidle")
        # One card per metric kind
        for k in ("choice", "nps", "csat"):
            page.wait_for_selector(f"#{k}-card")
        page.wait_for_selector("#csat-score")
        assert page.inner_text("#csat-score").strip() == "72%"

        # Hover a bar of the multiple-choice chart and wait for the tooltip
        page.wait_for_selector("#choice-graph .js-plotly-plot")
        bars = page.locator("#choice-graph .point")
        bars.first.hover()
        page.wait_for_selector('#choice-tooltip:has-text("Option")')

        # Leaving the chart hides it again
        page.mouse.move(0, 0)
        page.wait_for_selector("#choice-tooltip", state="hidden")

        # Clicking a summary row shows the same tooltip as hovering its bar
        page.click("#choice-summary >> text=Definitely")
        page.wait_for_selector('#choice-tooltip:has-text("Option")')

        # Try exporting CSV
        with page.expect_download() as dl_info:
            page.click("#choice-export-btn")
        download = dl_info.value
        assert download.suggested_filename == "choice_vertical_last_30_days.csv"

        browser.close()
