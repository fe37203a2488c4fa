import reflex

config = reflex.Config(  # type: ignore
    app_name="llm_evals_viewer",
    plugins=[
        reflex.plugins.TailwindV3Plugin(),
        reflex.plugins.sitemap.SitemapPlugin(),
    ],
)
