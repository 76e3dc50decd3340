#////////////////////////////////////////////////////////////////////////////////#
# File:         __init__.py                                                      #
# Author:       Douglas Nyberg                                                   #
# Email:        douglas1.nyberg@gmail.com                                        #
# Date:         2025-07-02                                                       #
# Description:  Package initialization for the weekly sales forecasting study.   #
#////////////////////////////////////////////////////////////////////////////////#

"""
Weekly retail sales forecasting comparison.

This package compares hierarchical ARIMA reconciliation, ARIMAX and Prophet on
weekly unit sales per product.
"""
