from setuptools import setup

package_name = "rule_match"

setup(
    name=package_name,
    version="0.0.1",
    packages=[package_name],
    python_requires=">=3.10",
    install_requires=["setuptools", "psutil", "numpy", "matplotlib"],
    extras_require={
        "test": ["pytest"],
    },
    zip_safe=True,
    maintainer="Your Name",
    maintainer_email="you@example.com",
    description="Counts strings fully derivable from a numbered grammar, including self-referential rules.",
    license="Apache-2.0",
    entry_points={
        "console_scripts": [
            "rule_match = rule_match.matcher:main",
            "summarize_runs = rule_match.summarize:main",
        ],
    },
)
