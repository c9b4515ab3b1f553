#!/usr/bin/env python3
"""
Setup configuration for smartcheck - S.M.A.R.T. drive health tracker
"""

from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="smartcheck",
    version="0.4.0",
    author="Magnus Modig",
    author_email="kontakt@modigs-datahjelp.no",
    description="S.M.A.R.T. drive health tracker - threshold/trend verdicts with per-drive history",
    long_description=long_description,
    long_description_content_type="text/markdown",
    py_modules=[
        "config_manager",
        "decision_engine",
        "disk_logger",
        "smart_monitor",
        "smart_parser",
        "summary_report",
        "web_monitor",
    ],
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
        "Operating System :: POSIX :: Linux",
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "Topic :: System :: Monitoring",
    ],
    python_requires=">=3.8",
    install_requires=[
        "pySMART>=1.2.0",
        "flask>=3.0.0",
        "flask-cors>=4.0.0",
        "waitress>=2.1.0",
    ],
    extras_require={
        "dev": ["pytest>=6.0", "pytest-cov>=2.10"],
    },
    entry_points={
        "console_scripts": [
            "smartcheck=smart_monitor:main",
            "smartcheck-web=web_monitor:main",
        ],
    },
    include_package_data=True,
    keywords="smart monitoring disk health s.m.a.r.t linux hdd smartctl",
    zip_safe=False,
    platforms=["Linux"],
)
