#!/usr/bin/env python
#
# Copyright (c) 2026 Wind River Systems, Inc.
#
# SPDX-License-Identifier: Apache-2.0
#
import setuptools

setuptools.setup(
    name='jvm_oom_supervisor',
    version='1.0.0',
    description='Container JVM launcher and OOM dump handler',
    license='Apache-2.0',
    install_requires=['boto3', 'botocore'],
    extras_require={
        'test': ['testtools', 'fixtures', 'mock'],
    },
    packages=['jvm_oom_supervisor', 'jvm_oom_supervisor.common',
              'jvm_oom_supervisor.tests'],
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'jvm-oom-supervisor = jvm_oom_supervisor.__main__:main'
        ],
    }
)
