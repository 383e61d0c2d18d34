"""
Pytest configuration and fixtures for duplicate detection tests.
"""

import pytest

from recorddedup.core.detection.models import DetectionConfig, Record


@pytest.fixture
def healthcare_records():
    """Two near-identical titles and one unrelated title."""
    return [
        Record.from_mapping({"Title": "Deep Learning in Healthcare"}),
        Record.from_mapping({"Title": "Deep Learning in Health Care"}),
        Record.from_mapping({"Title": "Unrelated Topic"}),
    ]


@pytest.fixture
def article_rows():
    """Raw article rows as a CSV reader would produce them."""
    return [
        {"Title": "Machine Learning in Healthcare", "Doi": "10.1234/jmlr.2023.001"},
        {"Title": "Artificial Intelligence and Ethics", "Doi": "10.5678/ethics.2023.002"},
        {"Title": "Machine Learning in Health Care", "Doi": "10.1234/jmlr.2023.009"},
        {"Title": "Deep Learning Applications", "Doi": "10.9012/ieee.2023.003"},
        {"Title": "Machine Learning in Healthcare", "Doi": "10.1234/jmlr.2023.011"},
        {"Title": "Deep Learning Application", "Doi": "10.9012/ieee.2023.013"},
    ]


@pytest.fixture
def mixed_records():
    """A larger set of records with clusters of similar titles."""
    titles = [
        "Graph Neural Networks for Chemistry",
        "Graph Neural Network for Chemistry",
        "A Survey of Reinforcement Learning",
        "Survey of Reinforcement Learning",
        "Graph Neural Networks in Chemistry",
        "Quantum Computing Basics",
        "Quantum Computing: Basics",
        "Protein Folding with Transformers",
        "Protein folding with transformers",
        "A Survey of Reinforcement Learning",
        "Unrelated",
        "Graph Neural Networks for Chemistry",
    ]
    return [Record.from_mapping({"Title": title, "Id": str(i)}) for i, title in enumerate(titles)]


@pytest.fixture
def title_config():
    """Default configuration comparing titles."""
    return DetectionConfig(threshold=85, comparison_keys=["Title"])
