#! /usr/bin/env python
# -*- coding: UTF-8 -*-

import os
import setuptools  # type: ignore

# The modules are written in Cython's pure Python mode; the cython
# decorators are no-ops unless the modules are compiled.


def strip_comments(line: str) -> str:
    return line.split('#', 1)[0].strip()


def pep508(line: str) -> str:
    if line.startswith('-i '):
        return ''
    if not line:
        return line
    if '://' in line:
        url, package_name = line.split('#egg=', 1)
        return '{} @ {}'.format(package_name.strip(), url.strip())
    return line


def req(filename: str) -> list:
    path = os.path.join(os.path.dirname(os.path.abspath(__file__)), filename)
    with open(path) as fp:
        requires = set(
            strip_comments(pep508(ln))
            for ln in fp.readlines()
        )
        requires -= set([''])
    return sorted(requires)


setup_params = dict(
    name="codonvar",
    version="0.1",
    description=(
        "Codon-level variant calls and haplotype counts for deep "
        "mutational scanning reads"),
    packages=['codonvar'],
    package_data={
        'codonvar': ['py.typed']
    },
    python_requires='>=3.8',
    install_requires=req('requirements.txt'),
    extras_require={
        'test': req('test-requirements.txt')
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Scientific/Engineering :: Bio-Informatics'],
    zip_safe=True)

if __name__ == '__main__':
    setuptools.setup(**setup_params)
