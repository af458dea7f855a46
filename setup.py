from setuptools import find_namespace_packages, setup


def get_requirements():
    with open("requirements.txt", "r") as f:
        lines = f.readlines()
    requirements = [line.strip() for line in lines if line.strip()]
    return requirements


setup(
    name="robreg",
    version="0.1.0",
    description="Robust rigid transformation estimation for point cloud registration.",
    packages=find_namespace_packages(include=["robreg", "robreg.*"]),
    python_requires=">=3.8",
    install_requires=get_requirements(),
    extras_require={"test": ["pytest"]},
)
