"""K-means and the Elbow Method, rendered as a literate customer segmentation article."""

__all__ = [
    "config",
    "io",
    "sample_data",
    "preprocessing",
    "clustering",
    "checks",
    "plotting",
    "article",
]
