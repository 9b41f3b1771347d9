from particleEngineering.MpsSim.runner import main

main()
