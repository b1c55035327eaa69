"""Convert Octomind test reports into Allure results."""

__version__ = "0.1.0"
