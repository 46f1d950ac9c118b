from llmtool_sdk.demo import main

main()
