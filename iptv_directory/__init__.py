"""IPTV channel directory with live EPG now/next, served as a Stremio add-on."""
