from setuptools import setup, find_packages

setup(
    name="tricontour",
    version="0.1.0",
    description="Contour lines and filled contours of triangulated elevation samples",
    author="Tricontour Team",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    py_modules=["logging_config"],
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20",
        "matplotlib>=3.4",
    ],
    extras_require={
        "dev": ["pytest>=6.0", "scipy>=1.7"],
    },
)
