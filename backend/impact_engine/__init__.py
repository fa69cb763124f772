"""Impact assessment engine for manufacturing projects."""
