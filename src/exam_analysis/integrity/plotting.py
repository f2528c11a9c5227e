"""
Plotting utilities for similarity matrices.
"""

import numpy as np
from matplotlib.figure import Figure

from exam_analysis.integrity.data_models import SimilarityMatrix

# Cell values are printed only for small matrices
MAX_ANNOTATED_SIZE = 15


def similarity_to_array(
    matrix: SimilarityMatrix,
) -> tuple[list[str], np.ndarray]:
    labels = list(matrix)
    values = np.array(
        [[matrix[a].get(b, 0.0) for b in labels] for a in labels],
        dtype=np.float64,
    ).reshape(len(labels), len(labels))
    return labels, values


def plot_similarity_heatmap(
    matrix: SimilarityMatrix,
    title: str = "Similarity",
) -> Figure:
    """
    Heatmap of a square similarity matrix with values in [0, 1].

    Args:
        matrix: Nested mapping row label -> column label -> similarity.
        title: Plot title.

    Returns:
        matplotlib Figure with heatmap.
    """
    import matplotlib.pyplot as plt

    labels, values = similarity_to_array(matrix)
    size = max(4.0, 0.5 * len(labels) + 2.0)
    fig, ax = plt.subplots(figsize=(size, size))

    image = ax.imshow(values, cmap="Reds", vmin=0.0, vmax=1.0)
    fig.colorbar(image, ax=ax, fraction=0.046, pad=0.04)

    ax.set_xticks(range(len(labels)))
    ax.set_yticks(range(len(labels)))
    ax.set_xticklabels(labels, rotation=90)
    ax.set_yticklabels(labels)

    if len(labels) <= MAX_ANNOTATED_SIZE:
        for i in range(len(labels)):
            for j in range(len(labels)):
                ax.text(
                    j,
                    i,
                    f"{values[i, j]:.2f}",
                    ha="center",
                    va="center",
                    color="white" if values[i, j] > 0.6 else "black",
                    fontsize=8,
                )

    ax.set_title(f"{title} (n={len(labels)})")

    fig.tight_layout()
    return fig
