#!/usr/bin/env python3
# -*- coding: UTF-8 -*-
from sollayout.cli import sollayout_compile

if __name__ == "__main__":
    sollayout_compile._parse_cli_args()
