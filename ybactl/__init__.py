"""
yba-ctl: installs, upgrades, backs up and restores YugabyteDB Anywhere
(yb-platform, prometheus and postgres) on a single host.
"""
