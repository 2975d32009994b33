from spektrum.cli import main

raise SystemExit(main())
