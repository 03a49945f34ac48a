"""Set-up file for cubiceos for installations using ``pip install .``"""
from setuptools import find_packages, setup


with open("requirements.txt") as f:
    required = f.read().splitlines()


setup(
    name="cubiceos",
    version="0.1.0",
    license="GPL",
    keywords=["cubic equation of state thermodynamics automatic differentiation"],
    install_requires=required,
    extras_require={
        "testing": ["pytest", "scipy", "sympy"],
    },
    description=(
        "Cubic equations of state for fluid mixtures with exact derivatives in"
        + " temperature, pressure and composition"
    ),
    platforms=["Linux", "Windows", "Mac OS-X"],
    python_requires=">=3.10",
    packages=find_packages("src"),
    package_dir={"": "src"},
    zip_safe=False,
)
