from setuptools import setup, find_packages

setup(
    name="medrag-qa",
    version="1.0.0",
    description="MedRAG medical Q&A over uploaded reports and a knowledge graph",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"medrag": ["static/*.html"]},
    include_package_data=True,
    install_requires=[
        "fastapi",
        "uvicorn[standard]",
        "python-multipart",
        "openai",
        "python-dotenv",
        "PyPDF2",
        "pydantic>=2",
        "langchain-core",
        "langchain-text-splitters",
        "qdrant-client>=1.10",
        "SQLAlchemy>=2.0",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    python_requires=">=3.10",
)
