from setuptools import setup

setup(
    name='hostMdx',
    version='0.1.0',
    author="J M Franck",
    description="Create and host a website from a tree of mdx documents",
    packages=['hostmdx',],
    package_data={'hostmdx': ['templates/*.html']},
    python_requires='>=3.9',
    install_requires=[
        'watchdog',
        'Jinja2',
        'Pygments',
        'PyYAML',
        'Markdown',
        'pathspec>=0.10',
    ],
    extras_require=dict(test=['pytest']),
    entry_points=dict(
        console_scripts=["host-mdx = hostmdx.command_line:main",])
)
