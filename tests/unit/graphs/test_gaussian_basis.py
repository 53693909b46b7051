"""Tests for the Gaussian distance expansion."""

import numpy as np
import pytest

pytest.importorskip("torch")

from atomgraph.graphs.export import gaussian_expansion  # noqa: E402


def test_peaks_sit_on_centers():
    expanded = gaussian_expansion(np.array([0.0, 4.0]), cutoff=4.0, n_gaussians=5)
    assert expanded.shape == (2, 5)
    assert expanded[0, 0] == pytest.approx(1.0)
    assert expanded[1, -1] == pytest.approx(1.0)
    assert np.argmax(expanded[1]) == 4


def test_accepts_plain_lists():
    assert gaussian_expansion([1.0, 2.0], cutoff=3.0, n_gaussians=4).shape == (2, 4)


@pytest.mark.parametrize("n_gaussians", [1, 0, -3])
def test_rejects_too_few_centers(n_gaussians):
    with pytest.raises(ValueError, match="n_gaussians"):
        gaussian_expansion(np.array([1.0]), cutoff=5.0, n_gaussians=n_gaussians)


@pytest.mark.parametrize("cutoff", [0.0, -1.0, float("nan")])
def test_rejects_non_positive_cutoff(cutoff):
    with pytest.raises(ValueError, match="cutoff"):
        gaussian_expansion(np.array([1.0]), cutoff=cutoff, n_gaussians=10)
