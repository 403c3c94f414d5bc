from setuptools import setup

# Read version from nettui/VERSION
with open('nettui/VERSION') as f:
    VERSION = f.read().strip()

setup(
    name='net-tui',
    version=VERSION,
    description='Live curses dashboard for connections, listening ports and interface counters',
    long_description=open('README.md', encoding='utf-8').read(),
    long_description_content_type='text/markdown',
    license='MIT',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console :: Curses',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Topic :: System :: Networking :: Monitoring',
    ],
    packages=['nettui'],
    package_data={'nettui': ['VERSION']},
    python_requires='>=3.7',
    install_requires=[
        'psutil',
        'pyyaml',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'net-tui=nettui:cli_entry',
        ],
    },
)
