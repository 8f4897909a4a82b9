"""
SPDX-License-Identifier: BSD-3-Clause
Copyright 2020 Intel Corporation
"""

import setuptools

if __name__ == "__main__":
    setuptools.setup()
